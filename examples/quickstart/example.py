"""
Quickstart — load the driver and run one query

Demonstrates: acquire_driver(), create_connection(), connect/exec/disconnect.

Connection parameters come from the environment so the script can point at
any SQL Anywhere server (defaults match the demo16 sample database).
"""

import logging
import os

import sqlanywhere

CONN_PARAMS = {
    "Host": os.environ.get("SQLANY_HOST", "localhost:2638"),
    "Server": os.environ.get("SQLANY_SERVER", "demo16"),
    "UserID": os.environ.get("SQLANY_USER", "DBA"),
    "Password": os.environ.get("SQLANY_PASSWORD", "sql"),
}

SQL = "SELECT EmployeeID, GivenName, Surname FROM Employees WHERE EmployeeID BETWEEN ? AND ?"


def main() -> None:
    driver = sqlanywhere.acquire_driver()
    client = driver.create_connection()
    client.connect(CONN_PARAMS)

    try:
        for low, high in ((200, 299), (300, 399)):
            rows = client.exec(SQL, [low, high])
            print(f"Employees {low}-{high}:")
            for row in rows:
                print(f"  {row}")
            print()
        client.exec("COMMIT")
    finally:
        client.disconnect()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    main()
