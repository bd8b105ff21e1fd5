"""Business logic services for PersonaForge."""
