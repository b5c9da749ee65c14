"""Loads the trailing window from the GitHub API and answers a question.

Requires GH_TOKEN (or GITHUB_TOKEN) with manage_billing:copilot or
read:enterprise scope, and COPILOT_ENTERPRISE set to the enterprise slug.
"""

import logging

from copilot_metrics.core.container import DIContainer


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    service = DIContainer.create_service(load=True)

    for info in service.report_catalog():
        print(f"{info.icon} {info.title} ({info.id})")
    print(service.query("generate a model usage report").markdown)


if __name__ == "__main__":
    main()
