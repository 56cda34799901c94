"""Console entry-point for the review queue webhook server.

Run with:

.. code-block:: bash

    python -m review_queue.webhook --port 3000

This delegates to `review_queue.webhook.entry.main()`.
"""

from review_queue.webhook.entry import main

if __name__ == "__main__":
    main()
