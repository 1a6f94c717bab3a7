# API module: routers are assembled in api.base
