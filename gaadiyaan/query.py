# gaadiyaan/query.py
"""Listing filter, sort and pagination queries.

`parse_filters` turns raw query-string values into typed filters and rejects
malformed ones; `build_query` turns typed filters into a data query and a
matching count query. All values reach the database as bound parameters.
"""
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from sqlalchemy import Select, and_, func, or_, select

from .exceptions import InvalidFilter
from .models import INT_MAX, INT_MIN, VehicleListing

DEFAULT_SORT = "newest"

SORT_ORDERS = {
    "price_low": (VehicleListing.price.asc(), VehicleListing.id.asc()),
    "price_high": (VehicleListing.price.desc(), VehicleListing.id.asc()),
    "oldest": (VehicleListing.created_at.asc(), VehicleListing.id.asc()),
    "newest": (VehicleListing.created_at.desc(), VehicleListing.id.desc()),
}


@dataclass
class ListingFilters:
    dealer_id: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    year: Optional[int] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    search: Optional[str] = None


def _raw(params: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = params.get(name)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return None


def _to_float(value: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(value)
    return number


def parse_filters(
    params: Mapping[str, str],
    default_page_size: int = 10,
    max_page_size: int = 100,
) -> Tuple[ListingFilters, str, int, int]:
    """Parse the listing endpoint's query parameters.

    Returns ``(filters, sort, page, page_size)``. Every malformed value is
    collected and reported in a single `InvalidFilter`.
    """
    invalid = []
    filters = ListingFilters(
        dealer_id=_raw(params, "dealer_id", "dealerId"),
        fuel_type=_raw(params, "fuelType"),
        transmission=_raw(params, "transmission"),
        search=_raw(params, "search"),
    )

    for name, attr in (("minPrice", "min_price"), ("maxPrice", "max_price")):
        value = _raw(params, name)
        if value is None:
            continue
        try:
            number = _to_float(value)
        except ValueError:
            invalid.append(name)
            continue
        if number < 0:
            invalid.append(name)
        else:
            setattr(filters, attr, number)

    year = _raw(params, "year")
    if year is not None:
        try:
            filters.year = int(year)
        except ValueError:
            invalid.append("year")
        else:
            if not INT_MIN <= filters.year <= INT_MAX:
                filters.year = None
                invalid.append("year")

    page, page_size = 1, default_page_size
    raw_page = _raw(params, "page")
    if raw_page is not None:
        try:
            page = int(raw_page)
        except ValueError:
            page = 0
        # keeps the offset within a signed 64-bit integer
        if not 1 <= page <= INT_MAX:
            invalid.append("page")
    raw_limit = _raw(params, "limit")
    if raw_limit is not None:
        try:
            page_size = int(raw_limit)
        except ValueError:
            page_size = 0
        if not 1 <= page_size <= max_page_size:
            invalid.append("limit")

    if invalid:
        raise InvalidFilter(invalid)

    sort = _raw(params, "sortBy", "sort") or DEFAULT_SORT
    return filters, sort, page, page_size


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_conditions(filters: ListingFilters):
    conds = []
    if filters.dealer_id:
        conds.append(VehicleListing.dealer_id == filters.dealer_id)
    if filters.min_price is not None:
        conds.append(VehicleListing.price >= filters.min_price)
    if filters.max_price is not None:
        conds.append(VehicleListing.price <= filters.max_price)
    if filters.year is not None:
        conds.append(VehicleListing.year == filters.year)
    if filters.fuel_type:
        conds.append(VehicleListing.fuel_type == filters.fuel_type.lower())
    if filters.transmission:
        conds.append(VehicleListing.transmission == filters.transmission.lower())
    if filters.search:
        pattern = f"%{_escape_like(filters.search)}%"
        conds.append(or_(
            VehicleListing.car_title.ilike(pattern, escape="\\"),
            VehicleListing.make.ilike(pattern, escape="\\"),
            VehicleListing.model.ilike(pattern, escape="\\"),
        ))
    return conds


def build_query(
    filters: Optional[ListingFilters] = None,
    sort: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
) -> Tuple[Select, Select]:
    """Build ``(data_query, count_query)`` for a page of listings."""
    conds = build_conditions(filters or ListingFilters())
    order_by = SORT_ORDERS.get(sort or DEFAULT_SORT, SORT_ORDERS[DEFAULT_SORT])

    data_query = select(VehicleListing)
    count_query = select(func.count()).select_from(VehicleListing)
    if conds:
        data_query = data_query.where(and_(*conds))
        count_query = count_query.where(and_(*conds))

    data_query = data_query.order_by(*order_by).offset((page - 1) * page_size).limit(page_size)
    return data_query, count_query
