from fastapi import Request
from sqlalchemy.orm import sessionmaker
from order_service.clients.catalog import CatalogClient

def get_session_factory(request: Request) -> sessionmaker:
    return request.app.state.session_factory

def get_catalog(request: Request) -> CatalogClient:
    return request.app.state.catalog
