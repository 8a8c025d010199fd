"""Components layer - domain logic modules.

This layer contains the modules that do the actual work:
- Similarity scoring and the simulated computation delay
- In-flight bookkeeping
- HTTP calls to the backend

Components are leaf modules that:
- Do NOT import services or interfaces
- ARE imported and used BY services
"""
