# backend/ecom_api/utils/nestedset.py
"""
Conversión árbol ⇄ conjunto anidado (nested set).

- generate_nested_set(): recorrido en pre-orden que asigna lft al bajar y
  rgt al subir, la profundidad y el path (segmentos unidos por '/').
- build_tree(): reconstruye el árbol a partir de las filas ordenadas por
  lft, sin recursión, con una pila de índices de padres abiertos.

Los nodos no guardan referencia a su padre; la pila sólo vive durante la
reconstrucción.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


@dataclass
class CategoryNode:
    segment: str
    name: str
    children: List["CategoryNode"] = field(default_factory=list)
    id: Optional[str] = None
    path: Optional[str] = None
    lft: int = -1
    rgt: int = -1
    depth: int = -1
    # Sólo las hojas llevan lista de productos (posiblemente vacía)
    products: Optional[List[Dict[str, Any]]] = None

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def preorder(self) -> Iterable["CategoryNode"]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_by_path(self, path: str) -> Optional["CategoryNode"]:
        """
        Busca un nodo recorriendo los segmentos del path.

        El primer segmento debe coincidir con la raíz; en cuanto un segmento
        no existe entre los hijos se devuelve None.
        """
        segments = path.split("/")
        if not segments or segments[0] != self.segment:
            return None
        node = self
        for segment in segments[1:]:
            node = next((c for c in node.children if c.segment == segment), None)
            if node is None:
                return None
        return node

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "segment": self.segment,
            "path": self.path,
            "name": self.name,
            "lft": self.lft,
            "rgt": self.rgt,
            "depth": self.depth,
        }
        if self.is_leaf:
            out["products"] = list(self.products or [])
        else:
            out["categories"] = [c.to_dict() for c in self.children]
        return out


@dataclass
class NestedSetRow:
    segment: str
    path: str
    name: str
    lft: int
    rgt: int
    depth: int
    id: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return self.rgt == self.lft + 1


def _assign(node: CategoryNode, lft: int, depth: int, parent_path: str) -> int:
    node.path = node.segment if not parent_path else f"{parent_path}/{node.segment}"
    rgt = lft + 1
    for child in node.children:
        rgt = _assign(child, rgt, depth + 1, node.path)
    node.lft = lft
    node.rgt = rgt
    node.depth = depth
    return rgt + 1


def generate_nested_set(root: CategoryNode) -> List[NestedSetRow]:
    """
    Asigna las coordenadas del conjunto anidado a todo el árbol y devuelve
    las filas en pre-orden. El orden de los hermanos es el de entrada.
    """
    _assign(root, 1, 0, "")
    return [
        NestedSetRow(segment=n.segment, path=n.path, name=n.name,
                     lft=n.lft, rgt=n.rgt, depth=n.depth, id=n.id)
        for n in root.preorder()
    ]


def build_tree(rows: List[Any]) -> Optional[CategoryNode]:
    """
    Reconstruye el árbol a partir de filas en pre-orden (ordenadas por lft).

    Cada fila se cuelga del padre abierto en la cima de la pila. Un nodo
    interno pasa a ser el nuevo padre abierto; una hoja cuyo rgt es el
    rgt del padre menos uno cierra ese padre, y el cierre se propaga hacia
    arriba mientras el nodo cerrado sea también el último hijo de su padre.
    """
    if not rows:
        return None

    def to_node(row) -> CategoryNode:
        return CategoryNode(segment=row.segment, name=row.name, id=row.id,
                            path=row.path, lft=row.lft, rgt=row.rgt, depth=row.depth)

    root = to_node(rows[0])
    stack: List[CategoryNode] = [root]
    for row in rows[1:]:
        node = to_node(row)
        if not stack:
            raise ValueError(f"nested set row {row.path!r} lies outside the root")
        parent = stack[-1]
        if not (parent.lft < node.lft and node.rgt < parent.rgt):
            raise ValueError(f"nested set row {row.path!r} is not contained by {parent.path!r}")
        parent.children.append(node)
        if node.rgt != node.lft + 1:
            stack.append(node)
            continue
        closed = node
        while len(stack) > 1 and closed.rgt == stack[-1].rgt - 1:
            closed = stack.pop()
    return root


def tree_from_dict(data: Dict[str, Any]) -> CategoryNode:
    """Construye un CategoryNode desde el JSON de entrada ya validado."""
    return CategoryNode(
        segment=data["segment"],
        name=data["name"],
        children=[tree_from_dict(c) for c in data.get("categories") or []],
    )
