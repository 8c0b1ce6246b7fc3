"""Identity bounded context: users, roles, claims, logins and tokens."""
