"""Identity server: local user/role registry kept in sync with a remote identity provider."""
