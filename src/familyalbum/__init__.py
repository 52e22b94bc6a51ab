"""
familyalbum - Family photo sharing web application with Streamlit

A private gallery where signed-in family members can:
- Browse, search, filter and sort the shared photo collection
- Upload photos with titles, events, places, people and tags
- Mark favorites and leave comments
- Store images in Google Cloud Storage and records in DuckDB
"""

__version__ = "0.1.0"
__author__ = "familyalbum"
__description__ = "Family photo sharing web application with Streamlit"
