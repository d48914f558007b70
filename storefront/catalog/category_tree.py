"""
Utility functions for category trees

Two representations are used:
- the nested tree served by the backend (``children`` lists)
- a flat, pre-ordered list of rows carrying ``depth`` (used by the admin
  reorder screen, where hierarchy is edited by moving and indenting rows)
"""


class CategoryHierarchyError(ValueError):
    """A flat category list whose depths cannot describe a tree"""


def flatten_categories(nodes, parent_id=None, depth=0):
    """
    Flatten a category tree into a pre-ordered list of rows.

    Each row holds the category fields (without ``children``) plus
    ``depth``, ``parentId`` and ``index`` (position in the returned list).
    """
    rows = _flatten(nodes or [], parent_id, depth)
    for position, row in enumerate(rows):
        row['index'] = position
    return rows


def _flatten(nodes, parent_id, depth):
    rows = []
    for node in nodes:
        row = {key: value for key, value in node.items() if key != 'children'}
        row['depth'] = depth
        row['parentId'] = parent_id
        rows.append(row)
        children = node.get('children') or []
        if children:
            rows.extend(_flatten(children, node.get('id'), depth + 1))
    return rows


def resolve_hierarchy(items):
    """
    Rebuild parent/order assignments from a flat list.

    An item's parent is the most recent preceding item one level up; order
    indexes count per parent starting at 0.

    Returns:
        list of {"ID", "ParentID", "OrderIndex"} (ParentID is None at root)

    Raises:
        CategoryHierarchyError: the first row is not at depth 0, or a row is
        more than one level deeper than the row before it
    """
    result = []
    parent_at_depth = [None]
    order_by_parent = {}
    previous_depth = -1

    for position, item in enumerate(items):
        depth = item.get('depth', 0)
        if position == 0 and depth != 0:
            raise CategoryHierarchyError(f"First category must be at depth 0, got {depth}")
        if depth < 0 or depth > previous_depth + 1:
            raise CategoryHierarchyError(
                f"Category {item.get('id')} jumps from depth {previous_depth} to {depth}"
            )

        # Drop levels deeper than this one
        del parent_at_depth[depth + 1:]

        parent_id = parent_at_depth[depth] if depth > 0 else None
        order_index = order_by_parent.get(parent_id, 0)
        order_by_parent[parent_id] = order_index + 1

        result.append({
            'ID': item.get('id'),
            'ParentID': parent_id,
            'OrderIndex': order_index,
        })

        parent_at_depth.append(item.get('id'))
        previous_depth = depth

    return result


def _find_index(items, category_id):
    for position, item in enumerate(items):
        if item.get('id') == category_id:
            return position
    return -1


def _subtree_end(items, index):
    """Index just past the subtree rooted at items[index]"""
    depth = items[index]['depth']
    end = index + 1
    while end < len(items) and items[end]['depth'] > depth:
        end += 1
    return end


def _renumber(items):
    """Copy rows, refreshing ``index`` and ``parentId`` from the depths"""
    rows = []
    parents = [None]
    for position, item in enumerate(items):
        row = dict(item)
        depth = row['depth']
        del parents[depth + 1:]
        row['parentId'] = parents[depth] if depth > 0 else None
        row['index'] = position
        parents.append(row.get('id'))
        rows.append(row)
    return rows


def move_up(items, category_id):
    """Swap a category (with its subtree) with the sibling above it"""
    index = _find_index(items, category_id)
    if index <= 0:
        return [dict(item) for item in items]

    depth = items[index]['depth']
    previous = index - 1
    while previous >= 0 and items[previous]['depth'] > depth:
        previous -= 1
    if previous < 0 or items[previous]['depth'] != depth:
        return [dict(item) for item in items]

    end = _subtree_end(items, index)
    reordered = items[:previous] + items[index:end] + items[previous:index] + items[end:]
    return _renumber(reordered)


def move_down(items, category_id):
    """Swap a category (with its subtree) with the sibling below it"""
    index = _find_index(items, category_id)
    if index < 0:
        return [dict(item) for item in items]

    end = _subtree_end(items, index)
    if end >= len(items) or items[end]['depth'] != items[index]['depth']:
        return [dict(item) for item in items]

    sibling_end = _subtree_end(items, end)
    reordered = items[:index] + items[end:sibling_end] + items[index:end] + items[sibling_end:]
    return _renumber(reordered)


def indent(items, category_id):
    """Make a category (with its subtree) a child of the row above it"""
    index = _find_index(items, category_id)
    if index <= 0:
        return [dict(item) for item in items]

    shift = items[index - 1]['depth'] + 1 - items[index]['depth']
    if shift <= 0:
        return [dict(item) for item in items]

    end = _subtree_end(items, index)
    reordered = [dict(item) for item in items]
    for row in reordered[index:end]:
        row['depth'] += shift
    return _renumber(reordered)


def outdent(items, category_id):
    """Move a category (with its subtree) one level up"""
    index = _find_index(items, category_id)
    if index < 0 or items[index]['depth'] == 0:
        return [dict(item) for item in items]

    end = _subtree_end(items, index)
    reordered = [dict(item) for item in items]
    for row in reordered[index:end]:
        row['depth'] -= 1
    return _renumber(reordered)


REORDER_ACTIONS = {
    'move_up': move_up,
    'move_down': move_down,
    'indent': indent,
    'outdent': outdent,
}


def find_category_by_slug(slug, tree):
    """Find a category by slug anywhere in the tree"""
    for category in tree or []:
        if category.get('slug') == slug:
            return category
        found = find_category_by_slug(slug, category.get('children') or [])
        if found:
            return found
    return None


def _path_to(category_id, nodes, trail):
    for node in nodes:
        current = trail + [node]
        if node.get('id') == category_id:
            return current
        found = _path_to(category_id, node.get('children') or [], current)
        if found:
            return found
    return None


def build_breadcrumbs(category_id, tree):
    """Breadcrumb navigation from the root to the target category"""
    path = _path_to(category_id, tree or [], []) or []
    return [
        {
            'name': category.get('name'),
            'slug': category.get('slug'),
            'href': f"/category/{category.get('slug')}",
        }
        for category in path
    ]


def get_category_path(category_id, tree):
    """IDs of the categories from the root to the target (empty if unknown)"""
    path = _path_to(category_id, tree or [], []) or []
    return [category.get('id') for category in path]


def flatten_category_tree(tree, depth=0, parent_path=None):
    """Flatten the tree keeping each row's id path from the root"""
    parent_path = parent_path or []
    rows = []
    for category in tree or []:
        current_path = parent_path + [category.get('id')]
        rows.append({**category, 'depth': depth, 'path': current_path})
        children = category.get('children') or []
        if children:
            rows.extend(flatten_category_tree(children, depth + 1, current_path))
    return rows


def category_options(tree, prefix=''):
    """Select options labelled with their ancestry ("Parent > Child")"""
    options = []
    for category in tree or []:
        label = f"{prefix} > {category.get('name')}" if prefix else category.get('name')
        options.append({'id': category.get('id'), 'name': label})
        options.extend(category_options(category.get('children') or [], label))
    return options
