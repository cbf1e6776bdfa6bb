from .client import ShopifyAdminClient
