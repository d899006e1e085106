"""HTTP API layer: routers and response schemas"""
