"""Domain services: credentials, sessions, tasks and account lifecycle."""
