"""
GraphQL documents used by the migrators.

Listing queries declare ``$first``/``$after`` so they can be driven by
:func:`shopify_migration.extractors.connection_pages`.
"""

FILES_QUERY = """
query files($first: Int!, $after: String) {
  files(first: $first, after: $after) {
    edges {
      node {
        id
        createdAt
        alt
        __typename
        ... on MediaImage {
          image {
            originalSrc
          }
        }
        ... on GenericFile {
          url
          fileStatus
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

MENUS_QUERY = """
query menus($first: Int!, $after: String) {
  menus(first: $first, after: $after) {
    edges {
      node {
        id
        handle
        title
        items {
          id
          title
          url
          type
          items {
            id
            title
            url
            type
            items {
              id
              title
              url
              type
            }
          }
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

FILE_CREATE_MUTATION = """
mutation fileCreate($files: [FileCreateInput!]!) {
  fileCreate(files: $files) {
    files {
      id
      createdAt
      alt
    }
    userErrors {
      field
      message
    }
  }
}
"""

FILE_DELETE_MUTATION = """
mutation fileDelete($fileIds: [ID!]!) {
  fileDelete(fileIds: $fileIds) {
    deletedFileIds
    userErrors {
      field
      message
    }
  }
}
"""

MENU_CREATE_MUTATION = """
mutation menuCreate($title: String!, $handle: String!, $items: [MenuItemCreateInput!]!) {
  menuCreate(title: $title, handle: $handle, items: $items) {
    menu {
      id
      handle
      title
    }
    userErrors {
      field
      message
    }
  }
}
"""

MENU_DELETE_MUTATION = """
mutation menuDelete($id: ID!) {
  menuDelete(id: $id) {
    deletedMenuId
    userErrors {
      field
      message
    }
  }
}
"""
