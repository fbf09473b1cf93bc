# Services package init
"""
Side Quest Backend — Services Layer
=====================================

Service Inventory:
    - StorageGateway: image upload / batch delete against the object store
    - CardRepository: card rows in the managed record store
    - LLMService (abstract) / GroqService: description polishing
    - upload_validation: typed pre-validation of uploaded images
    - CardService: orchestrates submit, list, delete and expiry cleanup

Gateways hold no per-request state; CardService is assembled per request
in dependencies.py so each request gets its own database session.
"""
