from prometheus_client import Counter, Histogram

# kind is "copy" or "upload"; keys are never used as labels
PARTS = Counter(
    "s3edit_parts_total",
    "Multipart parts written while patching objects",
    ["kind"],
)

PART_BYTES = Counter(
    "s3edit_part_bytes_total",
    "Bytes covered by written parts",
    ["kind"],
)

EDITS = Counter(
    "s3edit_edits_total",
    "Object patch attempts",
    ["outcome"],
)

EDIT_LATENCY = Histogram(
    "s3edit_edit_duration_seconds",
    "Wall time of a complete object patch in seconds",
    buckets=(0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0, 900.0),
)
