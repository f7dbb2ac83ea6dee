"""ClubSphere backend: clubs, events, memberships and payments."""
