from fastapi import Depends, Request
from sqlalchemy.orm import Session

from capacity.db.session import SessionLocal
from capacity.services.planning.catalog import Catalog
from capacity.services.planning.feed import AssignmentRecord
from capacity.services.planning.state import DebouncedRefresher, FeedStore
from capacity.services.reports.service import load_catalog

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_store(request: Request) -> FeedStore:
    return request.app.state.feed_store

def get_refresher(request: Request) -> DebouncedRefresher:
    return request.app.state.refresher

def get_catalog(db: Session = Depends(get_db)) -> Catalog:
    return load_catalog(db)

def get_records(store: FeedStore = Depends(get_store)) -> list[AssignmentRecord]:
    return store.records()
