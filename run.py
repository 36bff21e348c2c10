#!/usr/bin/env python3
"""
Simple script to run the order bridge server
"""

import uvicorn
from order_bridge.config import get_settings

if __name__ == "__main__":
    settings = get_settings()

    print("Starting order bridge...")
    print(f"Server will be available at: http://{settings.host}:{settings.port}")
    print(f"API Documentation: http://{settings.host}:{settings.port}/docs")
    print(f"Order flow: {settings.shopify_order_flow}, payment processor: {settings.payment_processor}")
    print("-" * 50)

    uvicorn.run(
        "order_bridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
