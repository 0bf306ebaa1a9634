"""
Supabase configuration for the tilemaster collections
Each collection is a two-column table: text primary key plus a jsonb payload
"""

from typing import Dict

from .settings import get_settings

TILES = "tiles"
CUSTOMERS = "customers"
EMPLOYEES = "employees"

COLLECTIONS = (TILES, CUSTOMERS, EMPLOYEES)

# Column names of every collection table
ID_COLUMN = "id"
PAYLOAD_COLUMN = "json_data"

# Keys for the local fallback store (only used when Supabase is NOT configured)
LOCAL_STORAGE_KEYS = {
    TILES: "tilemaster_db_tiles_v1",
    CUSTOMERS: "tilemaster_db_customers_v1",
    EMPLOYEES: "tilemaster_db_employees_v1",
}

# Shown to the user when the health check reports missing tables
SETUP_SQL = """
-- Run this in your Supabase SQL Editor to create the required tables

create table if not exists tiles (
  id text primary key,
  json_data jsonb
);

create table if not exists customers (
  id text primary key,
  json_data jsonb
);

create table if not exists employees (
  id text primary key,
  json_data jsonb
);

-- Enable Row Level Security (RLS) but allow public access
alter table tiles enable row level security;
alter table customers enable row level security;
alter table employees enable row level security;

-- Drop existing policies to avoid "already exists" errors when re-running
drop policy if exists "Public Access Tiles" on tiles;
drop policy if exists "Public Access Customers" on customers;
drop policy if exists "Public Access Employees" on employees;

create policy "Public Access Tiles" on tiles for all using (true);
create policy "Public Access Customers" on customers for all using (true);
create policy "Public Access Employees" on employees for all using (true);
"""


def get_supabase_config() -> Dict[str, str]:
    """Get Supabase configuration from settings / environment"""
    settings = get_settings()
    return {
        "url": settings.SUPABASE_URL.strip(),
        "anon_key": settings.SUPABASE_ANON_KEY.strip()
    }


def is_supabase_configured() -> bool:
    """True only when both the project URL and the anon key are set"""
    config = get_supabase_config()
    return bool(config["url"] and config["anon_key"])
