"""Application wiring: configuration, dependencies, FastAPI app and server"""
