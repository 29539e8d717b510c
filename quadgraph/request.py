import copy
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import RequestError, ValueConversionError
from .nquads import NQuad


class Op(str, Enum):
    SET = "set"
    DEL = "delete"


SET = Op.SET
DEL = Op.DEL


class Req:
    """
    A batch of mutations and/or a query, submitted as one request.

    Quads are copied when added, so the caller can keep reusing the same
    NQuad object while building the batch. A Req is consumed by the
    first DgraphClient.run() call.
    """

    def __init__(self):
        self.mutations: List[Tuple[NQuad, Op]] = []
        self.query: Optional[str] = None
        self.variables: Optional[Dict[str, str]] = None
        self._consumed = False

    def add_mutation(self, nq: NQuad, op: Op) -> None:
        if op not in (SET, DEL):
            raise ValueConversionError(f"Unknown mutation op: {op!r}")
        nq.validate()
        self.mutations.append((copy.deepcopy(nq), Op(op)))

    def set_query(self, query: str) -> None:
        self.query = query
        self.variables = None

    def set_query_with_vars(self, query: str, variables: Dict[str, Any]) -> None:
        self.query = query
        # Dgraph expects every variable value as a string.
        self.variables = {
            (k if k.startswith("$") else f"${k}"): str(v) for k, v in variables.items()
        }

    @property
    def has_mutations(self) -> bool:
        return bool(self.mutations)

    def quads(self, op: Op) -> List[NQuad]:
        return [nq for nq, o in self.mutations if o == op]

    def mutation_body(self) -> str:
        """Render the mutations as an RDF mutation block."""
        sections = []
        for op in (SET, DEL):
            lines = [nq.render() for nq in self.quads(op)]
            if lines:
                body = "\n".join(f"    {line}" for line in lines)
                sections.append(f"  {op.value} {{\n{body}\n  }}")
        return "{\n" + "\n".join(sections) + "\n}"

    def upsert_body(self) -> str:
        """Render query and mutations together as an upsert block."""
        if self.query is None:
            raise RequestError("Upsert needs a query")
        mutation = self.mutation_body()
        return (
            "upsert {\n"
            f"  query {self.query.strip()}\n"
            f"  mutation {mutation}\n"
            "}"
        )

    def consume(self) -> None:
        if self._consumed:
            raise RequestError("Request was already submitted")
        if not self.mutations and self.query is None:
            raise RequestError("Request has neither mutations nor a query")
        self._consumed = True
