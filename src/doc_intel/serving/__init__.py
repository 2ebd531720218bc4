"""
Serving: FastAPI application for the document intelligence engine.

HTTP routing, CORS and base64 decoding live here; the engine itself only
sees decoded requests.
"""
