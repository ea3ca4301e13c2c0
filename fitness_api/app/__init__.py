"""
Application package initializer.

The API is organised into layers: ``api`` (versioned routers),
``services`` (business rules), ``repositories`` (MongoDB access),
``schemas`` (request and response models) and ``core`` (settings,
logging, security and the database client).  Each domain (users,
profiles, fitness progress, workout preferences) has a module in every
layer.
"""
