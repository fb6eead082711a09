"""Análisis de técnica en vídeos de ejercicios a partir de *landmarks* corporales."""

__version__ = "0.1.0"
