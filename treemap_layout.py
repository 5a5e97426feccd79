"""
Squarified treemap layout shared by the market and portfolio heatmaps.

Items are plain dicts; their weight comes from ``value_key`` which is either
a key name or a callable, so market-cap sized and position-value sized maps
go through the same engine.
"""
import logging

logger = logging.getLogger(__name__)

# rows are capped so huge item sets don't rescan quadratically
MAX_ROW_ITEMS = 8


class InvalidViewportError(ValueError):
    """Raised when the layout viewport has a non-positive width or height."""


def extract_weight(item, value_key):
    """
    Weight of one item; value_key is a key name or a callable.
    Negative weights are clamped to 0 so the layout stays total.
    """
    raw = value_key(item) if callable(value_key) else item.get(value_key, 0)
    weight = float(raw or 0)
    if weight < 0:
        logger.warning("Negative weight %s clamped to 0: %r", weight, item)
        return 0.0
    return weight


def worst_ratio(row, row_sum, row_size, along):
    """
    Worst (furthest from 1) aspect ratio among the cells of a row.
    row: weights in the row
    row_size: thickness of the row, along: extent its cells split
    Zero-sized cells are skipped so they never block row growth.
    """
    worst = 1.0
    if row_sum <= 0 or row_size <= 0:
        return worst
    for weight in row:
        cell_size = along * weight / row_sum
        if cell_size <= 0:
            continue
        worst = max(worst, cell_size / row_size, row_size / cell_size)
    return worst


def select_row(weights, start, remaining_value, along, cross):
    """
    Grow a row greedily from `start` while the worst ratio does not get worse.
    Returns (end index, row weight sum). Ties accept the longer row.
    """
    best = float('inf')
    row_sum = 0.0
    end = start
    limit = min(len(weights), start + MAX_ROW_ITEMS)
    while end < limit:
        candidate = row_sum + weights[end]
        row_size = cross * candidate / remaining_value
        ratio = worst_ratio(weights[start:end + 1], candidate, row_size, along)
        if ratio > best:
            break
        best = ratio
        row_sum = candidate
        end += 1
    return end, row_sum


def layout_row(row, row_sum, row_size, x, y, along, is_horizontal):
    """
    Row를 실제로 배치하여 좌표 리스트 반환
    row: [(weight, item), ...]
    is_horizontal: cells sit side by side (row consumes height); otherwise
    they stack top to bottom (row consumes width)
    """
    rects = []
    offset = 0.0
    for weight, item in row:
        cell_size = along * weight / row_sum if row_sum > 0 else 0.0
        if is_horizontal:
            rects.append({'x': x + offset, 'y': y, 'w': cell_size, 'h': row_size, 'data': item})
        else:
            rects.append({'x': x, 'y': y + offset, 'w': row_size, 'h': cell_size, 'data': item})
        # running offset, not recomputed per cell
        offset += cell_size
    return rects


def calculate_treemap(data_list, width, height, value_key='weight', x=0, y=0):
    """
    Lay out `data_list` inside a width x height viewport whose top-left is (x, y).

    data_list: [{'weight': 100, ...}, ...] (any mapping; see value_key)
    반환: [{'x':, 'y':, 'w':, 'h':, 'data': original_item}, ...] in placement order

    Raises InvalidViewportError for a non-positive viewport. Empty input or an
    all-zero total weight yields [].
    """
    if width <= 0 or height <= 0:
        raise InvalidViewportError(f"treemap viewport must be positive, got {width}x{height}")

    weighted = [(extract_weight(item, value_key), item) for item in data_list]
    # [DETERMINISTIC] stable: equal weights keep their input order between calls
    weighted.sort(key=lambda pair: pair[0], reverse=True)
    weights = [w for w, _ in weighted]

    # unplaced weight from index i on; trailing zero weights sum to exactly 0
    remaining = [0.0] * (len(weights) + 1)
    for i in range(len(weights) - 1, -1, -1):
        remaining[i] = remaining[i + 1] + weights[i]
    if remaining[0] <= 0:
        return []

    cells = []
    cur_x, cur_y = x, y
    rem_w, rem_h = float(width), float(height)
    i = 0
    while i < len(weighted):
        remaining_value = remaining[i]
        if remaining_value <= 0:
            # only zero weights left: collapsed cells at the cursor
            cells.extend({'x': cur_x, 'y': cur_y, 'w': 0.0, 'h': 0.0, 'data': item}
                         for _, item in weighted[i:])
            break

        is_horizontal = rem_w >= rem_h
        along, cross = (rem_w, rem_h) if is_horizontal else (rem_h, rem_w)
        end, row_sum = select_row(weights, i, remaining_value, along, cross)

        if remaining[end] <= 0:
            # [HARD-SNAP] last weighted row takes whatever is left
            row_size = cross
        else:
            row_size = min(cross, cross * row_sum / remaining_value)

        cells.extend(layout_row(weighted[i:end], row_sum, row_size, cur_x, cur_y, along, is_horizontal))

        if is_horizontal:
            cur_y += row_size
            rem_h = max(rem_h - row_size, 0.0)
        else:
            cur_x += row_size
            rem_w = max(rem_w - row_size, 0.0)
        i = end

    return cells
