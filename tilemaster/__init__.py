"""
Tilemaster Package

Back-office data layer for a tile showroom:
- Inventory (tiles), customer relationship and staff roster records
- Supabase-backed collection sync with a local file fallback
- Optional AI text generation for product copy and business tips
"""

__version__ = "1.0.0"
__author__ = "Tilemaster Team"

# Submodules are imported on demand so the models can be used without
# the Supabase/OpenAI clients installed
