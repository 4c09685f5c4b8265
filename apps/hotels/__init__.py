"""Hotels app package.

Minimal hotel directory consumed by the booking flow: it answers whether a
hotel exists and how many rooms it can sell for a given night. Hotel CRUD,
images and ratings live outside this service.
"""
