from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from graphstore.config import settings
from graphstore.exceptions import (
    GraphStoreError,
    InternalFault,
    MalformedIdentifier,
    NotFoundError,
    ValidationError,
)
from graphstore.graph.memory_graph_store import GraphStore
from graphstore.utils.identifiers import parse_path_id
from graphstore.utils.logger import app_logger


logger = app_logger.bind(component="api_server")

ERROR_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    MalformedIdentifier: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InternalFault: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

router = APIRouter(prefix="/api")


def get_graph_store(request: Request) -> GraphStore:
    """Return the store owned by the running application."""
    return request.app.state.graph_store


def _validated_id(raw: str) -> int:
    parsed = parse_path_id(raw)
    if parsed is None:
        raise MalformedIdentifier("Invalid ID format")
    return parsed


def validated_node_id(node_id: str) -> int:
    return _validated_id(node_id)


def validated_relationship_id(relationship_id: str) -> int:
    return _validated_id(relationship_id)


@router.get("/graph")
async def get_graph(store: GraphStore = Depends(get_graph_store)):
    """Get all nodes and relationships."""
    try:
        return store.list_graph().to_dict()
    except Exception as e:
        logger.error(f"Error fetching graph data: {e}")
        raise InternalFault("Error fetching graph data")


@router.post("/nodes", status_code=status.HTTP_201_CREATED)
async def create_node(payload: Any = Body(default=None), store: GraphStore = Depends(get_graph_store)):
    """Create a node."""
    try:
        node = store.create_node(payload if payload is not None else {})
    except GraphStoreError:
        raise
    except Exception as e:
        logger.error(f"Error creating node: {e}")
        raise InternalFault("Error creating node")

    logger.info(f"Created node {node.id} ({node.type}: {node.name})")
    return node.to_dict()


@router.get("/nodes/{node_id}")
async def get_node(node_id: int = Depends(validated_node_id), store: GraphStore = Depends(get_graph_store)):
    """Get a node by id."""
    try:
        return store.get_node(node_id).to_dict()
    except GraphStoreError:
        raise
    except Exception as e:
        logger.error(f"Error fetching node {node_id}: {e}")
        raise InternalFault("Error fetching node")


@router.delete("/nodes/{node_id}")
async def delete_node(node_id: int = Depends(validated_node_id), store: GraphStore = Depends(get_graph_store)):
    """Delete a node together with its relationships."""
    try:
        removed = store.delete_node(node_id)
    except GraphStoreError:
        raise
    except Exception as e:
        logger.error(f"Error deleting node {node_id}: {e}")
        raise InternalFault("Error deleting node")

    logger.info(f"Deleted node {node_id} and {removed} related relationships")
    return {
        "message": "Node and related relationships deleted successfully",
        "deletedRelationships": removed,
    }


@router.get("/nodes/{node_id}/relationships")
async def get_node_relationships(node_id: int = Depends(validated_node_id),
                                 store: GraphStore = Depends(get_graph_store)):
    """Get relationships where the node is either endpoint."""
    try:
        return [rel.to_dict() for rel in store.get_relationships_for_node(node_id)]
    except Exception as e:
        logger.error(f"Error fetching relationships for node {node_id}: {e}")
        raise InternalFault("Error fetching relationships")


@router.post("/relationships", status_code=status.HTTP_201_CREATED)
async def create_relationship(payload: Any = Body(default=None), store: GraphStore = Depends(get_graph_store)):
    """Create a relationship between two existing nodes."""
    try:
        relationship = store.create_relationship(payload if payload is not None else {})
    except GraphStoreError:
        raise
    except Exception as e:
        logger.error(f"Error creating relationship: {e}")
        raise InternalFault("Error creating relationship")

    logger.info(
        f"Created relationship {relationship.id}: "
        f"{relationship.source} -[{relationship.relationship}]-> {relationship.target}"
    )
    return relationship.to_dict()


@router.delete("/relationships/{relationship_id}")
async def delete_relationship(relationship_id: int = Depends(validated_relationship_id),
                              store: GraphStore = Depends(get_graph_store)):
    """Delete a relationship."""
    try:
        store.delete_relationship(relationship_id)
    except GraphStoreError:
        raise
    except Exception as e:
        logger.error(f"Error deleting relationship {relationship_id}: {e}")
        raise InternalFault("Error deleting relationship")

    logger.info(f"Deleted relationship {relationship_id}")
    return {"message": "Relationship deleted successfully"}


@router.get("/stats")
async def get_stats(store: GraphStore = Depends(get_graph_store)):
    """Get graph statistics."""
    try:
        return store.stats()
    except Exception as e:
        logger.error(f"Error getting stats: {e}")
        raise InternalFault("Error fetching statistics")


async def handle_graph_store_error(_: Request, exc: GraphStoreError):
    """Translate store and transport errors into ``{"error": message}`` bodies."""
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code < 500:
        logger.warning(f"Rejected request: {exc.message}")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def handle_request_validation_error(_: Request, exc: RequestValidationError):
    logger.warning(f"Malformed request: {exc.errors()}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request body"})


async def handle_http_exception(_: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def handle_unexpected_error(request: Request, exc: Exception):
    """Failures outside a route body, such as response rendering."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the lifecycle of the in-memory store."""
    logger.info("Graph store API ready")
    yield
    logger.info(f"Shutting down, discarding {app.state.graph_store.stats()['total_nodes']} nodes")


def create_app(store: Optional[GraphStore] = None, cors_origins: Optional[List[str]] = None) -> FastAPI:
    """Build the API around a store instance; a fresh one is created if none is given."""
    app = FastAPI(title=settings.app_title, version=settings.app_version, lifespan=lifespan)
    app.state.graph_store = store if store is not None else GraphStore()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GraphStoreError, handle_graph_store_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    logger.info("Starting Graph Store API server")

    uvicorn.run(
        "api_server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )
