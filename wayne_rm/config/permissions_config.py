"""
Permissions and Roles Configuration
This config defines the permission matrix for all modules and the three
profile roles stored in profiles.role (funcionario, gerente, admin).
Roles are fixed; there is no role/permission table on the backend.
"""

ROLE_EMPLOYEE = "funcionario"
ROLE_MANAGER = "gerente"
ROLE_ADMIN = "admin"

ROLES = [ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_ADMIN]

# Define modules and their actions
MODULES = {
    "resources": {
        "resource": "resources",
        "actions": ["create", "read", "update", "delete", "request"],
        "description": "Equipment, vehicle and device management"
    },
    "access_logs": {
        "resource": "access_logs",
        "actions": ["create", "read", "read_own"],
        "description": "Resource movement history"
    },
    "alerts": {
        "resource": "alerts",
        "actions": ["read", "update"],
        "description": "User notifications"
    },
    "users": {
        "resource": "users",
        "actions": ["read", "update"],
        "description": "User profile and role management"
    },
    "profiles": {
        "resource": "profiles",
        "actions": ["read_own", "update_own"],
        "description": "Own profile and avatar"
    },
    "settings": {
        "resource": "settings",
        "actions": ["read", "update"],
        "description": "User preferences"
    },
    "dashboard": {
        "resource": "dashboard",
        "actions": ["read"],
        "description": "Dashboard statistics and chart data"
    },
    "reports": {
        "resource": "reports",
        "actions": ["read"],
        "description": "Management reports"
    },
    "system": {
        "resource": "system",
        "actions": ["read"],
        "description": "Service diagnostics"
    }
}

# Permissions granted per role; admin implicitly gets every permission
ROLE_GRANTS = {
    ROLE_EMPLOYEE: {
        "resources": ["read", "request"],
        "access_logs": ["read_own"],
        "alerts": ["read", "update"],
        "profiles": ["read_own", "update_own"],
        "settings": ["read", "update"],
        "dashboard": ["read"],
    },
    ROLE_MANAGER: {
        "resources": ["create", "read", "update", "request"],
        "access_logs": ["create", "read", "read_own"],
        "alerts": ["read", "update"],
        "users": ["read"],
        "profiles": ["read_own", "update_own"],
        "settings": ["read", "update"],
        "dashboard": ["read"],
        "reports": ["read"],
    },
}

# Additional descriptions for specific permissions
MODULE_SPECIFIC_PERMISSIONS = {
    "resources": {
        "request": "Request access to an available resource"
    },
    "access_logs": {
        "read_own": "Read own access history"
    },
    "users": {
        "update": "Change user roles"
    },
    "profiles": {
        "read_own": "Read own profile",
        "update_own": "Update own profile and avatar"
    }
}


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the permissions of each role
    Format: {
        "modules": {"resources": "Equipment, vehicle and device management", ...},
        "permissions": [
            {"name": "resources:create", "resource": "resources", "action": "create", "description": "..."},
            ...
        ],
        "roles": {
            "funcionario": ["alerts:read", ...],
            ...
        }
    }
    """
    permissions = []

    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]
        for action in module_config["actions"]:
            description = f"{action.replace('_', ' ').capitalize()} {resource}"
            if module_name in MODULE_SPECIFIC_PERMISSIONS and action in MODULE_SPECIFIC_PERMISSIONS[module_name]:
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": description
            })

    roles = {}
    for role, grants in ROLE_GRANTS.items():
        names = []
        for module_name, actions in grants.items():
            resource = MODULES[module_name]["resource"]
            names.extend(f"{resource}:{action}" for action in actions)
        roles[role] = sorted(names)
    roles[ROLE_ADMIN] = sorted(p["name"] for p in permissions)

    return {
        "modules": {config["resource"]: config["description"] for config in MODULES.values()},
        "permissions": permissions,
        "roles": roles
    }


PERMISSION_MATRIX = get_permission_matrix()


def get_role_permissions(role: str):
    """Permission names for a role; unknown roles get the employee set."""
    return PERMISSION_MATRIX["roles"].get(role, PERMISSION_MATRIX["roles"][ROLE_EMPLOYEE])
