# Services package init
"""
VetDesk Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the database.
How:   Each service is a stateless class with a module-level instance.
       Methods receive the request's AsyncSession (and the storage client
       where images are involved) and only flush; committing is the job of
       the session dependency.

Service Inventory:
    - auth_service:         register / login / logout / session lookup
    - customer_service:     customers and their pet counts
    - pet_service:          pets and the profile-image workflow
    - treatment_service:    the user's treatment catalog
    - visit_service:        visits, visit treatments and notes
    - visit_image_service:  visit image upload workflow
    - dashboard_service:    stats and upcoming visits
    - ownership:            user → customer → pet → visit checks (404 on mismatch)
    - storage / storage_keys: presigned URLs and key layout
"""
