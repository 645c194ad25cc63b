# Services package init
"""
Workbench Backend: Services Layer
==================================

What:  Everything between the HTTP routes and the database.

Service Inventory:
    - document_store:    DocumentStore / DocumentCollection (keys, revisions,
                         numeric store error codes)
    - resource_handler:  ResourceConfig, ResourceHandler, store error mapping
    - provisioning:      create / drop the resource collections
"""
