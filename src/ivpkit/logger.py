"""Contains the name for the logger of ivpkit modules.

``ivpkit`` uses a simple logging system based on the
`Logging <https://docs.python.org/3/library/logging.html>`__ standard library.
Logging messages are grouped in different levels:

* ``DEBUG``: Construction details, e.g. which calling convention was detected
    for a right-hand side and which Jacobian backend was resolved.
* ``WARNING``: An indication that something unexpected
    happened which may require attention.

Evaluation paths (derivative and Jacobian calls) never log.

Calling applications can configure the format and log level of the displayed messages
by `Configuring Logging <https://docs.python.org/3/howto/logging.html#configuring-logging>`__
for ``ivpkit.logger.ivpkit_logger``, e.g.::

    >>> import logging
    >>> logging.basicConfig(
    ...     level=logging.DEBUG,
    ...     format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    ... )
"""
import logging

logger_name = "ivpkit"
ivpkit_logger = logging.getLogger(logger_name)
