#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Animal shelter records (SQLite)

Commands:
  init                Create the shelter and credentials databases
  add-user            Register a user (staff or customer)
  list-animals        Print animal summaries, optionally filtered
  report              Print adopted animals with their approved requests and export CSV

Database locations come from SHELTER_DB_PATH / SHELTER_AUTH_DB_PATH or config.yaml.
"""

import argparse
import sys

import pandas as pd

from shelter.context import AppContext
from shelter.db import get_conn
from shelter.domain.filters import (
    AdmissionDateFilter,
    AdoptionDateFilter,
    SexFilter,
    StatusFilter,
    compile_filters,
)
from shelter.domain.models import UserRole
from shelter.errors import ShelterError, describe
from shelter.logs import configure_logging
from shelter.config import get_log_level
from shelter.repository import reporting_repo

PERIODS = ["today", "this_week", "this_month", "this_year", "all_time"]


def _filters_from_args(args):
    filters = []
    if args.status is not None:
        filters.append(StatusFilter(frozenset(args.status)))
    if args.sex is not None:
        filters.append(SexFilter(frozenset(args.sex)))
    if args.admission:
        filters.append(AdmissionDateFilter(args.admission))
    if args.adoption:
        filters.append(AdoptionDateFilter(args.adoption))
    return filters


# ---------------- Commands ----------------

def cmd_init(ctx: AppContext, args):
    _ = ctx.records
    _ = ctx.credentials
    print(f"Databases ready: {ctx.db_path}, {ctx.auth_db_path}")


def cmd_add_user(ctx: AppContext, args):
    ctx.credentials.sign_up(args.username, args.password, UserRole.from_db(args.role))
    print(f"User created: {args.username} ({args.role})")


def cmd_list_animals(ctx: AppContext, args):
    items = ctx.records.list_animals(_filters_from_args(args))
    if not items:
        print("No animals match.")
        return
    df = pd.DataFrame([a.to_dict() for a in items])
    df["admission"] = pd.to_datetime(df["admission_timestamp"], unit="s", utc=True).dt.strftime("%Y-%m-%d")
    print(df[["id", "name", "specie", "breed", "sex", "status", "admission"]].to_string(index=False))


def cmd_report(ctx: AppContext, args):
    _ = ctx.records
    predicate, params = compile_filters(_filters_from_args(args))
    bound = reporting_repo.adoption_report_params(params)
    with get_conn(ctx.db_path) as conn:
        df = pd.read_sql_query(reporting_repo.adoption_report_sql(predicate), conn, params=bound)

    pd.set_option("display.max_rows", 200)
    pd.set_option("display.width", 160)

    print("\n=== Adoption Report ===")
    if df.empty:
        print("(no adoptions)")
    else:
        df["adopted_on"] = pd.to_datetime(df["adoption_timestamp"], unit="s", utc=True).dt.strftime("%Y-%m-%d")
        print(df[["animal_id", "animal_name", "specie", "breed", "adopter_name", "email", "adopted_on"]])
    df.to_csv(args.out, index=False, encoding="utf-8")
    print(f"\nExported: {args.out}")


def _add_filter_args(p):
    p.add_argument("--status", nargs="*", default=None, help="animal statuses, e.g. available adopted")
    p.add_argument("--sex", nargs="*", default=None)
    p.add_argument("--admission", choices=PERIODS, default=None)
    p.add_argument("--adoption", choices=PERIODS, default=None)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Animal shelter records (SQLite)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="create database schemas")
    p_init.set_defaults(func=cmd_init)

    p_user = sub.add_parser("add-user", help="register a user")
    p_user.add_argument("--username", required=True)
    p_user.add_argument("--password", required=True)
    p_user.add_argument("--role", choices=["staff", "customer"], default="customer")
    p_user.set_defaults(func=cmd_add_user)

    p_list = sub.add_parser("list-animals", help="print animal summaries")
    _add_filter_args(p_list)
    p_list.set_defaults(func=cmd_list_animals)

    p_rep = sub.add_parser("report", help="export adoption report")
    _add_filter_args(p_rep)
    p_rep.add_argument("--out", default="adoption_report.csv")
    p_rep.set_defaults(func=cmd_report)

    args = parser.parse_args(argv)
    configure_logging(get_log_level())
    ctx = AppContext.from_config()
    try:
        args.func(ctx, args)
    except ShelterError as e:
        print(f"[ERROR] {describe(e)}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
