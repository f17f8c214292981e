"""Core: dominio, configuración, errores y servicios. No conoce la CLI."""
