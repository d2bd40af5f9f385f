"""
Sync 진입점

실행 방법:
    python -m syncer
"""

import asyncio

from syncer.bootstrap import main

if __name__ == "__main__":
    asyncio.run(main())
