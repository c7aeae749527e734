from fastapi import APIRouter

from flightbook.api.routes import health, auth, aircraft, flights, bookings, tickets, payments

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])  # GET /
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])  # POST /login, /login-json, /register
api_router.include_router(aircraft.router, prefix="/aircraft", tags=["aircraft"])  # seat layouts, admin CRUD
api_router.include_router(flights.router, prefix="/flights", tags=["flights"])  # search, detail, admin CRUD, seat map
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])  # create, update, delete, search, stats
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])  # issue, update, cancel, delete
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])  # open, settle, list
