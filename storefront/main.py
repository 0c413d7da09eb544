# storefront/main.py
import os

import uvicorn

from storefront.api import create_app

app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "storefront.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
    )
