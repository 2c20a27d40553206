from alloccheck.dataloader.config_loader import ConfigLoader
from alloccheck.dataloader.normalizer import RecordNormalizer
from alloccheck.dataloader.postload_handler import LoadResultHandler
from alloccheck.dataloader.table_loader import TableLoader
from alloccheck.dataloader.types import LoadResult

__all__ = ["ConfigLoader", "LoadResult", "LoadResultHandler", "RecordNormalizer", "TableLoader"]
