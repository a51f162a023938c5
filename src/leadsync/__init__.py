"""LeadSync - organic social-media leads from keyword profiles."""

__version__ = "0.1.0"
