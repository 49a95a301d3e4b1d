# src/models/__init__.py

from .organizations import *
from .catalog import *
from .locations import *
from .inventory import *
# import every model file here
