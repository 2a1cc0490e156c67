import logging
import sys

# Package-wide console output. Modules log through
# logging.getLogger(__name__) and propagate here.
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.DEBUG)
console_handler.setFormatter(
    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
)

package_logger = logging.getLogger(__name__)
package_logger.setLevel(logging.INFO)
package_logger.addHandler(console_handler)

# numba logs every compilation pass at DEBUG; matplotlib logs font lookups
for noisy in ("numba", "matplotlib"):
    logging.getLogger(noisy).setLevel(logging.WARNING)
