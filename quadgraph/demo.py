#!/usr/bin/env python3
"""
quadgraph demo

Creates two people with typed values, facets, a location and a friend
edge, reads person1 back and then deletes the edge.

Usage:
    quadgraph-demo
    quadgraph-demo -d 10.0.0.5:8080 --verbose
"""

import argparse
import datetime as dt
import json
import logging
import sys

from .client import DgraphClient
from .config import ADDRESS_ENV, DEFAULT_ADDRESS, ClientConfig
from .errors import QuadGraphError
from .geo import wkb_to_geometry
from .nquads import (
    NQuad,
    add_facet,
    bool_value,
    date_value,
    datetime_value,
    float_value,
    geojson_value,
    int_value,
    str_value,
    uid,
)
from .request import DEL, SET, Req
from .response import parse_time

log = logging.getLogger(__name__)

PERSON1_QUERY = """{{
  me(func: uid({uid})) {{
    uid
    name @facets
    now
    birthday
    loc
    salary
    age
    married
    friend @facets {{
      uid
      name
    }}
  }}
}}"""


def build_mutations() -> Req:
    req = Req()

    # _:person1 asks the server to assign a new uid.
    nq = NQuad(subject="_:person1", predicate="name")
    str_value("Steven Spielberg", nq)
    add_facet("since", "2006-01-02T15:04:05", nq)
    # String facets carry their own double quotes.
    add_facet("alias", '"Steve"', nq)
    req.add_mutation(nq, SET)

    nq = NQuad(subject="_:person1", predicate="now")
    datetime_value(dt.datetime.now().astimezone(), nq)
    req.add_mutation(nq, SET)

    nq = NQuad(subject="_:person1", predicate="birthday")
    date_value(dt.date(1991, 2, 1), nq)
    req.add_mutation(nq, SET)

    nq = NQuad(subject="_:person1", predicate="loc")
    geojson_value('{"type":"Point","coordinates":[-122.2207184,37.72129059]}', nq)
    req.add_mutation(nq, SET)

    nq = NQuad(subject="_:person1", predicate="age")
    int_value(25, nq)
    req.add_mutation(nq, SET)

    nq = NQuad(subject="_:person1", predicate="salary")
    float_value(13333.6161, nq)
    req.add_mutation(nq, SET)

    nq = NQuad(subject="_:person1", predicate="married")
    bool_value(False, nq)
    req.add_mutation(nq, SET)

    nq = NQuad(subject="_:person2", predicate="name")
    str_value("William Jones", nq)
    req.add_mutation(nq, SET)

    nq = NQuad(subject="_:person1", predicate="friend", object_id="_:person2")
    add_facet("close", "true", nq)
    req.add_mutation(nq, SET)

    return req


def show_person(resp):
    person1 = resp.nodes[0].children[0]
    props = person1.properties

    print("Name: ", props[0].value.get_str_val())
    print("Now: ", parse_time(props[1].value.get_str_val()))
    print("Birthday: ", parse_time(props[2].value.get_str_val()))
    print("Loc: ", wkb_to_geometry(props[3].value.get_geo_val()))
    print("Salary: ", props[4].value.get_double_val())
    print("Age: ", props[5].value.get_int_val())
    print("Married: ", props[6].value.get_bool_val())

    person2 = person1.children[0]
    print(f"{person2.attribute} name: {person2.properties[0].value.get_str_val()}")


def run_demo(client: DgraphClient):
    resp = client.run(build_mutations())
    person1_uid = resp.assigned_uids["person1"]
    person2_uid = resp.assigned_uids["person2"]
    log.info(f"person1={person1_uid} person2={person2_uid}")

    req = Req()
    req.set_query(PERSON1_QUERY.format(uid=uid(person1_uid)))
    resp = client.run(req)

    print(f"Raw Response: {json.dumps(resp.raw, indent=2)}")
    show_person(resp)

    # Delete the friend edge.
    nq = NQuad(subject=uid(person1_uid), predicate="friend", object_id=uid(person2_uid))
    req = Req()
    req.add_mutation(nq, DEL)
    client.run(req)
    log.info("Deleted friend edge")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Dgraph client demo")
    parser.add_argument(
        "-d",
        type=str,
        default=None,
        dest="address",
        help=f"Dgraph server address (default: ${ADDRESS_ENV} or {DEFAULT_ADDRESS})"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S"
    )

    try:
        env = ClientConfig.from_env()
        address = env.address if args.address is None else args.address
        with DgraphClient(address, timeout=env.timeout) as client:
            run_demo(client)
    except (QuadGraphError, ValueError, KeyError, IndexError) as e:
        log.critical(f"{type(e).__name__}: {e}")
        sys.exit(1)
    return 0


if __name__ == "__main__":
    main()
