"""Reference terminal endpoint for termbridge.

A small FastAPI backend that speaks the termbridge message protocol and
runs submitted commands through a shell subprocess. Useful for local
development and for exercising the client end to end.
"""
