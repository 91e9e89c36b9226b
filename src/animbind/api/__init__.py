"""
animbind - API Layer

Optional HTTP surface over the instance registry. Import create_app from
animbind.api.main.

Structure:
- routes/     : Endpoint handlers
- schemas/    : Pydantic schemas
- middleware/ : Error handling
"""
