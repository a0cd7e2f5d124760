# Services package init
"""
Los Inmaduros Backend — Services Layer
=======================================

Service Inventory:
    - RouteService:       route catalog and route detail
    - RouteCallService:   route call lifecycle and meeting points
    - AttendanceService:  confirm / cancel attendance, attendee lists
    - ReviewService:      one review per user and route
    - FavoriteService:    per-user favorite routes
    - PhotoService:       gallery uploads, cover photos, moderation
    - StorageService:     image validation, local or Supabase storage
    - ClerkClient:        Clerk Backend API (users, sessions, JWKS)
    - UserSyncService:    mirrors Clerk users into the local users table

Services receive an AsyncSession, raise InmadurosError subclasses and only
flush; committing is the request session's job.
"""
