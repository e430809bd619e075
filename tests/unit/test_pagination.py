from nonprofitsuite.utils.pagination import (
    DEFAULT_PER_PAGE,
    MAX_PER_PAGE,
    build_limit_clause,
    get_pagination_meta,
    parse_pagination_args,
)

ALLOWED = ("id", "total_donated")


def test_defaults():
    args = parse_pagination_args({}, ALLOWED)
    assert args.page == 1
    assert args.per_page == DEFAULT_PER_PAGE
    assert args.offset == 0
    assert args.orderby == "id"
    assert args.order == "DESC"


def test_per_page_is_bounded():
    assert parse_pagination_args({"per_page": 10_000}, ALLOWED).per_page == MAX_PER_PAGE
    assert parse_pagination_args({"per_page": 0}, ALLOWED).per_page == 1
    assert parse_pagination_args({"per_page": "abc"}, ALLOWED).per_page == DEFAULT_PER_PAGE


def test_page_offset():
    args = parse_pagination_args({"page": 3, "per_page": 20}, ALLOWED)
    assert args.offset == 40
    assert args.limit == 20


def test_negative_page_becomes_first():
    assert parse_pagination_args({"page": -4}, ALLOWED).page == 1


def test_explicit_limit_and_offset_win():
    args = parse_pagination_args({"page": 5, "limit": 10, "offset": 30}, ALLOWED)
    assert args.limit == 10
    assert args.offset == 30
    assert args.page == 4


def test_orderby_outside_allow_list_falls_back():
    args = parse_pagination_args({"orderby": "id; DROP TABLE donors", "order": "sideways"}, ALLOWED,
                                 default_orderby="total_donated", default_order="ASC")
    assert args.orderby == "total_donated"
    assert args.order == "ASC"


def test_filters_exclude_paging_keys_and_blanks():
    args = parse_pagination_args({"page": 2, "donor_status": "active", "donor_type": ""}, ALLOWED)
    assert args.filters == {"donor_status": "active"}


def test_meta_and_limit_clause():
    args = parse_pagination_args({"per_page": 10, "page": 2}, ALLOWED)
    meta = get_pagination_meta(25, args)
    assert meta == {"total": 25, "per_page": 10, "current_page": 2, "total_pages": 3, "has_more": True}
    assert build_limit_clause(args) == "LIMIT 10 OFFSET 10"
    assert get_pagination_meta(0, args)["total_pages"] == 0
