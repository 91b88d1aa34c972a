# app/routers/__init__.py

# Esto expone los módulos para que "from app.routers import cash" funcione
from . import cash
from . import photos
from . import reports
