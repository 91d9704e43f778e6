"""
Seed script to create demo employees with register PINs.
Run with: python -m scripts.seed_data
"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy import select
from tillkeeper.core.database import AsyncSessionLocal, engine
from tillkeeper.core.security import get_pin_hash
from tillkeeper.models.employee import Employee, EmployeeRole, EmployeeStatus

EMPLOYEES = [
    {"name": "Maria Santos", "role": EmployeeRole.ADMIN, "pin": "9999"},
    {"name": "Jose Reyes", "role": EmployeeRole.MANAGER, "pin": "1234"},
    {"name": "Ana Cruz", "role": EmployeeRole.CASHIER, "pin": "5678"},
    {"name": "Paolo Garcia", "role": EmployeeRole.CASHIER, "pin": "9012"},
]


async def seed_data():
    """Seed the database with demo employees."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Employee).limit(1))
        if result.scalar_one_or_none():
            print("Employees already exist. Skipping seed.")
            await engine.dispose()
            return

        created = []
        for emp_data in EMPLOYEES:
            employee = Employee(
                name=emp_data["name"],
                role=emp_data["role"],
                pin_hash=get_pin_hash(emp_data["pin"]),
                status=EmployeeStatus.ACTIVE,
            )
            db.add(employee)
            created.append((employee, emp_data["pin"]))

        await db.commit()
        print("Seed data created successfully!")
        print("\nRegister logins:")
        for employee, pin in created:
            print(f"  {employee.name} ({employee.role.value}) id={employee.id} PIN: {pin}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_data())
