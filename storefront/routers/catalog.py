from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.db import get_db
from storefront.domain.catalog.extras import effective_price_cents, load_extras

router = APIRouter(prefix="/catalog", tags=["catalog"])


def product_out(product: models.Product) -> schemas.ProductOut:
    return schemas.ProductOut(
        id=product.id,
        name=product.name,
        description=product.description or "",
        price_cents=product.price_cents,
        promotion_price_cents=product.promotion_price_cents,
        effective_price_cents=effective_price_cents(product.price_cents, product.promotion_price_cents),
        image_url=product.image_url or "",
        category=product.category.value,
        is_out_of_stock=product.is_out_of_stock,
        extras=[schemas.ExtraOut(**extra) for extra in load_extras(product.extras)],
    )


@router.get("/products", response_model=list[schemas.ProductOut])
def list_products(
    category: schemas.CategoryValue | None = Query(default=None),
    include_out_of_stock: bool = Query(default=True),
    db: Session = Depends(get_db),
):
    query = db.query(models.Product)
    if category:
        query = query.filter(models.Product.category == models.ProductCategory(category))
    if not include_out_of_stock:
        query = query.filter(models.Product.is_out_of_stock.is_(False))
    products = query.all()
    # enum columns sort by stored name, so order by the category value here
    products.sort(key=lambda product: (product.category.value, product.name.lower()))
    return [product_out(product) for product in products]


@router.get("/products/{product_id}", response_model=schemas.ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = db.get(models.Product, product_id)
    if not product:
        raise HTTPException(404, "Produto não encontrado")
    return product_out(product)


@router.post("/products/check", response_model=schemas.ProductCheckOut)
def check_products(payload: schemas.ProductCheckIn, db: Session = Depends(get_db)):
    requested = list(dict.fromkeys(pid.strip() for pid in payload.product_ids if pid.strip()))
    rows = db.query(models.Product).filter(models.Product.id.in_(requested)).all() if requested else []
    by_id = {row.id: row for row in rows}
    return schemas.ProductCheckOut(
        missing=[pid for pid in requested if pid not in by_id],
        out_of_stock=[pid for pid in requested if pid in by_id and by_id[pid].is_out_of_stock],
    )
