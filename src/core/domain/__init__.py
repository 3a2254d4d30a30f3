"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras (entries, requests, outcomes).
- El dominio no conoce HTTP, CLI, ni SDKs: solo conceptos del protocolo.
"""
