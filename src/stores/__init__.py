# Store-specific data adapters
# Each module maps one store's export format onto the forecasting records

from .warehouse_export import LoadedData, WarehouseExportLoader

__all__ = ["LoadedData", "WarehouseExportLoader"]
