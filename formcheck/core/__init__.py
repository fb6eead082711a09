"""Tipos compartidos por todas las etapas del análisis."""
