from typing import List, Dict, Tuple

from models.data_models import BoundingBox


def normalize_polygon(poly):
    """Convert polygon to list of tuples [(x,y),...]"""
    if not poly:
        return []
    out = []
    if isinstance(poly[0], dict):
        for p in poly:
            x = float(p.get("x", p.get("X", 0)))
            y = float(p.get("y", p.get("Y", 0)))
            out.append((x, y))
    else:
        for p in poly:
            out.append((float(p[0]), float(p[1])))
    return out


def poly_to_rect_coords(polygon: List[Dict[str, float]]) -> Tuple[float, float, float, float]:
    """Convert polygon to bounding box coordinates"""
    pts = normalize_polygon(polygon)
    if not pts:
        return 0, 0, 0, 0
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return min(xs), min(ys), max(xs), max(ys)


def pixel_polygon_to_box(polygon, img_size: Tuple[int, int]) -> BoundingBox:
    """Convert pixel vertices (origin top-left) to a normalized bottom-left box."""
    w, h = img_size
    x1, y1, x2, y2 = poly_to_rect_coords(polygon)
    x1, x2 = max(0.0, min(x1, w)), max(0.0, min(x2, w))
    y1, y2 = max(0.0, min(y1, h)), max(0.0, min(y2, h))
    return BoundingBox(
        x=x1 / w,
        y=1.0 - y2 / h,
        width=(x2 - x1) / w,
        height=(y2 - y1) / h,
    )


def box_to_pixel_rect(box: BoundingBox, img_size: Tuple[int, int]) -> Tuple[int, int, int, int]:
    """Convert a normalized bottom-left box to a pixel rectangle (origin top-left)."""
    w, h = img_size
    x1 = box.x * w
    y1 = box.top * h
    return int(round(x1)), int(round(y1)), int(round(x1 + box.width * w)), int(round(y1 + box.height * h))
