# Routes package init
"""
VetDesk Backend — API Routes Package
======================================

Route Inventory:
    - auth.py:        /api/auth/register, /login, /logout, /me
    - customers.py:   /api/customers[/{id}], /api/customers/{id}/pets[/{petId}],
                      /api/customers/{id}/pets/{petId}/image/upload-url
    - treatments.py:  /api/treatments[/{id}]
    - visits.py:      /api/visits[/{id}], /api/customers/{id}/pets/{petId}/visits,
                      visit treatments, notes and images
    - dashboard.py:   /api/dashboard/stats, /api/dashboard/upcoming
    - health.py:      /health

Routes stay thin: resolve the current user, call a service, wrap the result
in the JSON envelope the dashboard expects ({customer}, {pets}, ...).
"""
