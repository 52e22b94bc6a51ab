"""
Services module for familyalbum application.

This module contains all service classes that handle business logic:
- AuthService: sign-in providers, sessions and session-change subscriptions
- RecordStore: generic table access on DuckDB
- PhotoService: photos, favorites, comments and dashboard counters
- StorageService / LocalStorageService: object storage for uploaded files
- UploadService: the upload workflow
- ViewLoader: concurrent, phased loading of view data
- query_photos: search, filter and sort over the loaded working set
"""

from .auth import AuthService, Session, SessionSubscription, UserInfo
from .loader import DashboardData, PhotoViewData, Task, ViewLoader, run_phase
from .photos import PhotoService, PhotoStats, get_photo_service
from .query import Category, PhotoQuery, SortKey, query_photos
from .records import RecordStore, get_record_store
from .storage import LocalStorageService, StorageService, StoredObject, get_storage_service
from .uploads import UploadFile, UploadForm, UploadService

__all__ = [
    "AuthService",
    "Session",
    "SessionSubscription",
    "UserInfo",
    "DashboardData",
    "PhotoViewData",
    "Task",
    "ViewLoader",
    "run_phase",
    "PhotoService",
    "PhotoStats",
    "get_photo_service",
    "Category",
    "PhotoQuery",
    "SortKey",
    "query_photos",
    "RecordStore",
    "get_record_store",
    "LocalStorageService",
    "StorageService",
    "StoredObject",
    "get_storage_service",
    "UploadFile",
    "UploadForm",
    "UploadService",
]
