# Services package init
"""
MediScan API: Services Layer
=============================

What:  Thin adapters over the external collaborators.
How:   Each collaborator has an abstract contract and one concrete
       implementation; instances are built in the application lifespan and
       injected into routes (see mediscan.dependencies).

Service Inventory:
    - IdentityProvider / SessionTokenIdentityProvider: caller identity (PyJWT)
    - DocumentStore / MongoDocumentStore: analyses and doctor stats (motor)
    - HealthAssistant / GeminiHealthAssistant: health-query answers (Gemini)
"""
