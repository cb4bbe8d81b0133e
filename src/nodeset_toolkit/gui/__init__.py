"""Qt front end for the nodeset importer."""
