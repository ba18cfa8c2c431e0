"""
greenhero - Client for the GreenHero eco marketplace and AI assistant backend.
"""

__version__ = "1.0.0"
