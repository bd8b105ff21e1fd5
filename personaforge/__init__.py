"""PersonaForge: synthetic identity and social-media persona generator."""

__version__ = "1.0.0"
