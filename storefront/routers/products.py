from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
import hashlib
import logging
from typing import List
from pydantic import TypeAdapter
from storefront.cache import ResponseCache
from storefront.dependencies import get_cache, get_store, require_admin
from storefront.schemas import ProductCreate, ProductRecord, ProductUpdate
from storefront.store import CatalogStore

router = APIRouter(prefix="/api/products", tags=["products"])
logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "products"
ALL_PRODUCTS_KEY = "products:all"
CACHE_CONTROL = "public, max-age=300"

_product_list = TypeAdapter(List[ProductRecord])


def _product_key(product_id: str) -> str:
    return f"{CACHE_NAMESPACE}:{product_id}"


def _etag(body: bytes) -> str:
    return f'"{hashlib.sha1(body).hexdigest()}"'


def _cacheable_response(request: Request, body: bytes) -> Response:
    """
    Wrap an encoded JSON body with caching headers.

    The ETag is derived from the bytes, so a conditional request against
    an unchanged payload gets an empty 304.
    """
    etag = _etag(body)
    headers = {"Cache-Control": CACHE_CONTROL, "ETag": etag}
    if request.headers.get("if-none-match") == etag:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    return Response(content=body, media_type="application/json", headers=headers)


@router.get("", response_model=List[ProductRecord])
async def list_products(
    request: Request,
    store: CatalogStore = Depends(get_store),
    cache: ResponseCache = Depends(get_cache),
):
    """
    List the whole catalog.

    The encoded payload is cached for the cache TTL; mutations invalidate it.
    """
    body = cache.get(ALL_PRODUCTS_KEY)
    if body is None:
        body = _product_list.dump_json(store.get_all_products(), by_alias=True)
        cache.set(ALL_PRODUCTS_KEY, body)
    return _cacheable_response(request, body)


@router.get("/{product_id}", response_model=ProductRecord)
async def get_product(
    product_id: str,
    request: Request,
    store: CatalogStore = Depends(get_store),
    cache: ResponseCache = Depends(get_cache),
):
    key = _product_key(product_id)
    body = cache.get(key)
    if body is None:
        product = store.get_product(product_id)
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        body = product.model_dump_json(by_alias=True).encode()
        cache.set(key, body)
    return _cacheable_response(request, body)


@router.post(
    "",
    response_model=ProductRecord,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_product(
    payload: ProductCreate,
    store: CatalogStore = Depends(get_store),
    cache: ResponseCache = Depends(get_cache),
):
    product = store.create_product(payload)
    cache.invalidate(CACHE_NAMESPACE)
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


@router.put("/{product_id}", response_model=ProductRecord, dependencies=[Depends(require_admin)])
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    store: CatalogStore = Depends(get_store),
    cache: ResponseCache = Depends(get_cache),
):
    """
    Partial update: fields missing from the body keep their stored value.
    """
    product = store.update_product(product_id, payload)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    cache.invalidate(CACHE_NAMESPACE)
    logger.info("Updated product %s", product_id)
    return product


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(require_admin)],
)
async def delete_product(
    product_id: str,
    store: CatalogStore = Depends(get_store),
    cache: ResponseCache = Depends(get_cache),
):
    if not store.delete_product(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    cache.invalidate(CACHE_NAMESPACE)
    logger.info("Deleted product %s", product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
