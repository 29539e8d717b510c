import json
import logging
from typing import Any, Dict, Iterable, Optional

import pandas as pd
import requests

from .config import DEFAULT_ADDRESS, DEFAULT_TIMEOUT, base_url
from .errors import ResponseParseError, ServerError, TransportError
from .nquads import NQuad
from .request import DEL, SET, Req
from .response import Response

log = logging.getLogger(__name__)


class DgraphClient:
    """
    Client for a Dgraph server.

    Mutations are sent as RDF N-Quads and committed immediately, queries are
    sent as DQL. Both go over the server's HTTP API.
    """

    def __init__(self, address: str = DEFAULT_ADDRESS, timeout: float = DEFAULT_TIMEOUT):
        self.address = address
        self.base_url = base_url(address)
        self.timeout = timeout
        self.session = requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        self.session.close()

    def _post(self, path: str, body: str, content_type: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        log.debug(f"POST {url} ({content_type}, {len(body)} bytes)")
        try:
            response = self.session.post(
                url,
                data=body.encode("utf-8"),
                headers={"Content-Type": content_type},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Connection error: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            raise ServerError(
                f"{response.status_code} Server Error: {self._error_message(data) or response.text}",
                status_code=response.status_code,
            )
        if data is None:
            raise ResponseParseError("Server returned non-JSON response")

        errors = data.get("errors") if isinstance(data, dict) else None
        if errors:
            first = errors[0] if isinstance(errors[0], dict) else {"message": str(errors[0])}
            raise ServerError(
                self._error_message(data),
                status_code=response.status_code,
                code=(first.get("extensions") or {}).get("code"),
            )
        return data

    @staticmethod
    def _error_message(data: Any) -> Optional[str]:
        if not isinstance(data, dict):
            return None
        errors = data.get("errors")
        if errors:
            return "; ".join(
                e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors
            )
        return data.get("message") or data.get("error")

    def run(self, req: Req) -> Response:
        """
        Submit a request and decode the response.

        Mutations are committed atomically in one transaction. A request
        holding both mutations and a query is sent as an upsert block.
        """
        req.consume()
        if req.has_mutations and req.query is not None:
            data = self._post("/mutate?commitNow=true", req.upsert_body(), "application/rdf")
        elif req.has_mutations:
            data = self._post("/mutate?commitNow=true", req.mutation_body(), "application/rdf")
        elif req.variables:
            body = json.dumps({"query": req.query, "variables": req.variables})
            data = self._post("/query", body, "application/json")
        else:
            data = self._post("/query", req.query, "application/dql")
        return Response.from_json(data)

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Response:
        req = Req()
        if variables:
            req.set_query_with_vars(query, variables)
        else:
            req.set_query(query)
        return self.run(req)

    def mutate(
        self,
        set_quads: Iterable[NQuad] = (),
        delete_quads: Iterable[NQuad] = (),
    ) -> Dict[str, str]:
        """Set and delete quads in one transaction. Returns the assigned uids."""
        req = Req()
        for nq in set_quads:
            req.add_mutation(nq, SET)
        for nq in delete_quads:
            req.add_mutation(nq, DEL)
        return self.run(req).assigned_uids

    def execute(self, query: str, block: Optional[str] = None) -> pd.DataFrame:
        """
        Execute a query and return the matched nodes as a Pandas DataFrame.
        """
        return self.query(query).to_frame(block)

    def alter(self, schema: str) -> None:
        """Update the predicate schema, e.g. "loc: geo @index(geo) ."."""
        self._post("/alter", schema, "application/dql")

    def drop_all(self):
        """Clear the database."""
        self._post("/alter", json.dumps({"drop_all": True}), "application/json")
