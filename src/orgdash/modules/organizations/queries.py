"""GraphQL documents used by the organization service."""

_ORGANIZATION_FIELDS = """
    id name slug domain website logo createdAt updatedAt
    membershipCount
    subscription { plan status monthlyRevenue trialEnd currentPeriodEnd }
"""

# ============================================================
# Queries
# ============================================================

LIST_ORGANIZATIONS = f"""
query Orgs($limit: Int!, $offset: Int!, $sortBy: String!, $sortOrder: SortOrder!) {{
  organizations(pagination: {{ limit: $limit, offset: $offset, sortBy: $sortBy, sortOrder: $sortOrder }}) {{
    pageInfo {{ totalCount }}
    edges {{ node {{ {_ORGANIZATION_FIELDS} }} }}
  }}
}}
"""

GET_ORGANIZATION = f"""
query Org($id: ID!) {{
  organization(id: $id) {{ {_ORGANIZATION_FIELDS} }}
}}
"""

GET_ORGANIZATION_MEMBERS = f"""
query OrgMembers($id: ID!) {{
  organization(id: $id) {{
    {_ORGANIZATION_FIELDS}
    members {{
      role joinedAt
      user {{ id email firstName lastName }}
    }}
  }}
}}
"""

SEARCH_USERS = """
query SearchUsers($search: String!, $limit: Int!) {
  users(search: $search, pagination: { limit: $limit, offset: 0 }) {
    edges { node { id email firstName lastName } }
  }
}
"""

# ============================================================
# Mutations
# ============================================================

CREATE_ORGANIZATION = f"""
mutation CreateOrg($input: CreateOrganizationInput!) {{
  createOrganization(input: $input) {{ {_ORGANIZATION_FIELDS} }}
}}
"""

UPDATE_ORGANIZATION = f"""
mutation UpdateOrg($id: ID!, $input: UpdateOrganizationInput!) {{
  updateOrganization(id: $id, input: $input) {{ {_ORGANIZATION_FIELDS} }}
}}
"""

DELETE_ORGANIZATION = """
mutation DeleteOrg($id: ID!) {
  deleteOrganization(id: $id)
}
"""

ADD_MEMBER = """
mutation AddMember($organizationId: ID!, $userId: ID!, $role: String) {
  addOrganizationMember(organizationId: $organizationId, userId: $userId, role: $role) { id }
}
"""

REMOVE_MEMBER = """
mutation RemoveMember($organizationId: ID!, $userId: ID!) {
  removeOrganizationMember(organizationId: $organizationId, userId: $userId)
}
"""

UPDATE_MEMBER_ROLE = """
mutation UpdateMemberRole($organizationId: ID!, $userId: ID!, $role: String!) {
  updateOrganizationMemberRole(organizationId: $organizationId, userId: $userId, role: $role)
}
"""
