# Points d'entrée : chpk-pack, chpk-unpack, chpk-extract, chpk-add, chpk-remove,
# chpk-inspect, chpk-metrics, chpk-batch (voir pyproject.toml)
