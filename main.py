import logging
import sys
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from database import LOG_LEVEL
from cli import main

if __name__ == "__main__":
    # Configure logging
    logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    sys.exit(main())
