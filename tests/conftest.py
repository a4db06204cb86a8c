import plistlib

import pytest

from pbxgraft.config import Options
from pbxgraft.descriptor import ProjectDescriptor
from pbxgraft.xcode.parser import parse_xcode_project

HOST_TARGET_ID = "13B07F861A680F5B00A75B9A"
TESTS_TARGET_ID = "00E356ED1AD99517003FC87E"
MAIN_GROUP_ID = "83CBB9F61A601CBA00E9B192"
PRODUCTS_GROUP_ID = "83CBBA001A601CBA00E9B192"
PROJECT_ID = "83CBB9F71A601CBA00E9B192"
HOST_DEBUG_ID = "13B07F941A680F5B00A75B9A"
HOST_RELEASE_ID = "13B07F951A680F5B00A75B9A"
TESTS_DEBUG_ID = "00E356F61AD99517003FC87E"
TESTS_RELEASE_ID = "00E356F71AD99517003FC87E"

PBXPROJ = r"""// !$*UTF8*$!
{
	archiveVersion = 1;
	classes = {
	};
	objectVersion = 54;
	objects = {

/* Begin PBXBuildFile section */
		13B07FBC1A68108700A75B9A /* AppDelegate.mm in Sources */ = {isa = PBXBuildFile; fileRef = 13B07FB01A68108700A75B9A /* AppDelegate.mm */; };
		13B07FBF1A68108700A75B9A /* Images.xcassets in Resources */ = {isa = PBXBuildFile; fileRef = 13B07FB51A68108700A75B9A /* Images.xcassets */; };
		00E356F31AD99517003FC87E /* LumbusTests.m in Sources */ = {isa = PBXBuildFile; fileRef = 00E356F21AD99517003FC87E /* LumbusTests.m */; };
/* End PBXBuildFile section */

/* Begin PBXFileReference section */
		13B07F961A680F5B00A75B9A /* Lumbus.app */ = {isa = PBXFileReference; explicitFileType = wrapper.application; includeInIndex = 0; path = Lumbus.app; sourceTree = BUILT_PRODUCTS_DIR; };
		13B07FB01A68108700A75B9A /* AppDelegate.mm */ = {isa = PBXFileReference; fileEncoding = 4; lastKnownFileType = sourcecode.cpp.objcpp; name = AppDelegate.mm; path = Lumbus/AppDelegate.mm; sourceTree = "<group>"; };
		13B07FB51A68108700A75B9A /* Images.xcassets */ = {isa = PBXFileReference; lastKnownFileType = folder.assetcatalog; name = Images.xcassets; path = Lumbus/Images.xcassets; sourceTree = "<group>"; };
		13B07FB61A68108700A75B9A /* Info.plist */ = {isa = PBXFileReference; fileEncoding = 4; lastKnownFileType = text.plist.xml; name = Info.plist; path = Lumbus/Info.plist; sourceTree = "<group>"; };
		00E356EE1AD99517003FC87E /* LumbusTests.xctest */ = {isa = PBXFileReference; explicitFileType = wrapper.cfbundle; includeInIndex = 0; path = LumbusTests.xctest; sourceTree = BUILT_PRODUCTS_DIR; };
		00E356F21AD99517003FC87E /* LumbusTests.m */ = {isa = PBXFileReference; lastKnownFileType = sourcecode.c.objc; path = LumbusTests.m; sourceTree = "<group>"; };
/* End PBXFileReference section */

/* Begin PBXFrameworksBuildPhase section */
		13B07F8C1A680F5B00A75B9A /* Frameworks */ = {
			isa = PBXFrameworksBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXFrameworksBuildPhase section */

/* Begin PBXGroup section */
		13B07FAE1A68108700A75B9A /* Lumbus */ = {
			isa = PBXGroup;
			children = (
				13B07FB01A68108700A75B9A /* AppDelegate.mm */,
				13B07FB51A68108700A75B9A /* Images.xcassets */,
				13B07FB61A68108700A75B9A /* Info.plist */,
			);
			name = Lumbus;
			sourceTree = "<group>";
		};
		00E356EF1AD99517003FC87E /* LumbusTests */ = {
			isa = PBXGroup;
			children = (
				00E356F21AD99517003FC87E /* LumbusTests.m */,
			);
			path = LumbusTests;
			sourceTree = "<group>";
		};
		83CBB9F61A601CBA00E9B192 = {
			isa = PBXGroup;
			children = (
				13B07FAE1A68108700A75B9A /* Lumbus */,
				00E356EF1AD99517003FC87E /* LumbusTests */,
				83CBBA001A601CBA00E9B192 /* Products */,
			);
			indentWidth = 2;
			sourceTree = "<group>";
			tabWidth = 2;
			usesTabs = 0;
		};
		83CBBA001A601CBA00E9B192 /* Products */ = {
			isa = PBXGroup;
			children = (
				13B07F961A680F5B00A75B9A /* Lumbus.app */,
				00E356EE1AD99517003FC87E /* LumbusTests.xctest */,
			);
			name = Products;
			sourceTree = "<group>";
		};
/* End PBXGroup section */

/* Begin PBXNativeTarget section */
		13B07F861A680F5B00A75B9A /* Lumbus */ = {
			isa = PBXNativeTarget;
			buildConfigurationList = 13B07F931A680F5B00A75B9A /* Build configuration list for PBXNativeTarget "Lumbus" */;
			buildPhases = (
				13B07F871A680F5B00A75B9A /* Sources */,
				13B07F8C1A680F5B00A75B9A /* Frameworks */,
				13B07F8E1A680F5B00A75B9A /* Resources */,
				00DD1BFF1BD5951E006B06BC /* Bundle React Native code and images */,
			);
			buildRules = (
			);
			dependencies = (
			);
			name = Lumbus;
			productName = Lumbus;
			productReference = 13B07F961A680F5B00A75B9A /* Lumbus.app */;
			productType = "com.apple.product-type.application";
		};
		00E356ED1AD99517003FC87E /* LumbusTests */ = {
			isa = PBXNativeTarget;
			buildConfigurationList = 00E357021AD99517003FC87E /* Build configuration list for PBXNativeTarget "LumbusTests" */;
			buildPhases = (
				00E356EA1AD99517003FC87E /* Sources */,
			);
			buildRules = (
			);
			dependencies = (
			);
			name = LumbusTests;
			productName = LumbusTests;
			productReference = 00E356EE1AD99517003FC87E /* LumbusTests.xctest */;
			productType = "com.apple.product-type.bundle.unit-test";
		};
/* End PBXNativeTarget section */

/* Begin PBXProject section */
		83CBB9F71A601CBA00E9B192 /* Project object */ = {
			isa = PBXProject;
			attributes = {
				LastUpgradeCheck = 1210;
				TargetAttributes = {
					13B07F861A680F5B00A75B9A = {
						LastSwiftMigration = 1120;
					};
				};
			};
			buildConfigurationList = 83CBB9FA1A601CBA00E9B192 /* Build configuration list for PBXProject "Lumbus" */;
			compatibilityVersion = "Xcode 12.0";
			developmentRegion = en;
			hasScannedForEncodings = 0;
			knownRegions = (
				en,
				Base,
			);
			mainGroup = 83CBB9F61A601CBA00E9B192;
			productRefGroup = 83CBBA001A601CBA00E9B192 /* Products */;
			projectDirPath = "";
			projectRoot = "";
			targets = (
				13B07F861A680F5B00A75B9A /* Lumbus */,
				00E356ED1AD99517003FC87E /* LumbusTests */,
			);
		};
/* End PBXProject section */

/* Begin PBXResourcesBuildPhase section */
		13B07F8E1A680F5B00A75B9A /* Resources */ = {
			isa = PBXResourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
				13B07FBF1A68108700A75B9A /* Images.xcassets in Resources */,
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXResourcesBuildPhase section */

/* Begin PBXShellScriptBuildPhase section */
		00DD1BFF1BD5951E006B06BC /* Bundle React Native code and images */ = {
			isa = PBXShellScriptBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			inputPaths = (
				"$(SRCROOT)/.xcode.env.local",
				"$(SRCROOT)/.xcode.env",
			);
			name = "Bundle React Native code and images";
			outputPaths = (
			);
			runOnlyForDeploymentPostprocessing = 0;
			shellPath = /bin/sh;
			shellScript = "set -e\n\nWITH_ENVIRONMENT=\"$REACT_NATIVE_PATH/scripts/xcode/with-environment.sh\"\n\"$WITH_ENVIRONMENT\" \"$REACT_NATIVE_XCODE\"\n";
		};
/* End PBXShellScriptBuildPhase section */

/* Begin PBXSourcesBuildPhase section */
		13B07F871A680F5B00A75B9A /* Sources */ = {
			isa = PBXSourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
				13B07FBC1A68108700A75B9A /* AppDelegate.mm in Sources */,
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
		00E356EA1AD99517003FC87E /* Sources */ = {
			isa = PBXSourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
				00E356F31AD99517003FC87E /* LumbusTests.m in Sources */,
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXSourcesBuildPhase section */

/* Begin XCBuildConfiguration section */
		13B07F941A680F5B00A75B9A /* Debug */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				ASSETCATALOG_COMPILER_APPICON_NAME = AppIcon;
				CODE_SIGN_ENTITLEMENTS = Lumbus/Lumbus.entitlements;
				CURRENT_PROJECT_VERSION = 1;
				INFOPLIST_FILE = Lumbus/Info.plist;
				LD_RUNPATH_SEARCH_PATHS = (
					"$(inherited)",
					"@executable_path/Frameworks",
				);
				PRODUCT_BUNDLE_IDENTIFIER = com.lumbus.app;
				PRODUCT_NAME = Lumbus;
				SWIFT_OPTIMIZATION_LEVEL = "-Onone";
				SWIFT_VERSION = 5.0;
			};
			name = Debug;
		};
		13B07F951A680F5B00A75B9A /* Release */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				ASSETCATALOG_COMPILER_APPICON_NAME = AppIcon;
				CODE_SIGN_ENTITLEMENTS = Lumbus/Lumbus.entitlements;
				CURRENT_PROJECT_VERSION = 1;
				INFOPLIST_FILE = Lumbus/Info.plist;
				LD_RUNPATH_SEARCH_PATHS = (
					"$(inherited)",
					"@executable_path/Frameworks",
				);
				PRODUCT_BUNDLE_IDENTIFIER = com.lumbus.app;
				PRODUCT_NAME = Lumbus;
				SWIFT_VERSION = 5.0;
			};
			name = Release;
		};
		00E356F61AD99517003FC87E /* Debug */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				INFOPLIST_FILE = LumbusTests/Info.plist;
				PRODUCT_BUNDLE_IDENTIFIER = "org.reactjs.native.example.$(PRODUCT_NAME:rfc1034identifier)";
				PRODUCT_NAME = LumbusTests;
			};
			name = Debug;
		};
		00E356F71AD99517003FC87E /* Release */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				INFOPLIST_FILE = LumbusTests/Info.plist;
				PRODUCT_BUNDLE_IDENTIFIER = "org.reactjs.native.example.$(PRODUCT_NAME:rfc1034identifier)";
				PRODUCT_NAME = LumbusTests;
			};
			name = Release;
		};
		83CBBA201A601CBA00E9B192 /* Debug */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				ALWAYS_SEARCH_USER_PATHS = NO;
				IPHONEOS_DEPLOYMENT_TARGET = 15.1;
				SDKROOT = iphoneos;
			};
			name = Debug;
		};
		83CBBA211A601CBA00E9B192 /* Release */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				ALWAYS_SEARCH_USER_PATHS = NO;
				IPHONEOS_DEPLOYMENT_TARGET = 15.1;
				SDKROOT = iphoneos;
				VALIDATE_PRODUCT = YES;
			};
			name = Release;
		};
/* End XCBuildConfiguration section */

/* Begin XCConfigurationList section */
		00E357021AD99517003FC87E /* Build configuration list for PBXNativeTarget "LumbusTests" */ = {
			isa = XCConfigurationList;
			buildConfigurations = (
				00E356F61AD99517003FC87E /* Debug */,
				00E356F71AD99517003FC87E /* Release */,
			);
			defaultConfigurationIsVisible = 0;
			defaultConfigurationName = Release;
		};
		13B07F931A680F5B00A75B9A /* Build configuration list for PBXNativeTarget "Lumbus" */ = {
			isa = XCConfigurationList;
			buildConfigurations = (
				13B07F941A680F5B00A75B9A /* Debug */,
				13B07F951A680F5B00A75B9A /* Release */,
			);
			defaultConfigurationIsVisible = 0;
			defaultConfigurationName = Release;
		};
		83CBB9FA1A601CBA00E9B192 /* Build configuration list for PBXProject "Lumbus" */ = {
			isa = XCConfigurationList;
			buildConfigurations = (
				83CBBA201A601CBA00E9B192 /* Debug */,
				83CBBA211A601CBA00E9B192 /* Release */,
			);
			defaultConfigurationIsVisible = 0;
			defaultConfigurationName = Release;
		};
/* End XCConfigurationList section */
	};
	rootObject = 83CBB9F71A601CBA00E9B192 /* Project object */;
}
"""

PODFILE = """require File.join(File.dirname(`node --print "require.resolve('expo/package.json')"`), "scripts/autolinking")

platform :ios, '15.1'

target 'Lumbus' do
  use_expo_modules!
  config = use_native_modules!

  post_install do |installer|
    react_native_post_install(
      installer,
      config[:reactNativePath],
      :mac_catalyst_enabled => false,
    )
  end
end
"""

TIME_H = """#pragma once

#include <stdint.h>

#if !defined(_WIN32) && (!defined(__IPHONE_10_0) || __IPHONE_OS_VERSION_MIN_REQUIRED < __IPHONE_10_0)
#define FOLLY_HAVE_CLOCK_GETTIME 0
typedef uint8_t clockid_t;
#endif
"""


def make_options(platform_root, **overrides) -> Options:
    kwargs = dict(
        platform_root=str(platform_root),
        app_name="Lumbus",
        app_bundle_id="com.lumbus.app",
        target_name="LumbusWidget",
        bundle_id="com.lumbus.app.widget",
        app_group="group.com.lumbus.shared",
        team_id="MQY423BU9T",
        deployment_target="16.0",
        swift_version="5.0",
        display_name="Lumbus Widget",
    )
    kwargs.update(overrides)
    return Options(**kwargs)


@pytest.fixture
def project():
    return parse_xcode_project(PBXPROJ)


@pytest.fixture
def ios_root(tmp_path):
    root = tmp_path / "ios"
    (root / "Lumbus.xcodeproj").mkdir(parents=True)
    (root / "Lumbus.xcodeproj" / "project.pbxproj").write_text(PBXPROJ, encoding="utf-8")
    (root / "Lumbus").mkdir()
    with open(root / "Lumbus" / "Info.plist", "wb") as f:
        plistlib.dump(
            {
                "CFBundleIdentifier": "$(PRODUCT_BUNDLE_IDENTIFIER)",
                "CFBundleShortVersionString": "1.2.0",
                "CFBundleVersion": "$(CURRENT_PROJECT_VERSION)",
            },
            f,
        )
    with open(root / "Lumbus" / "Lumbus.entitlements", "wb") as f:
        plistlib.dump({"aps-environment": "development"}, f)
    (root / "Podfile").write_text(PODFILE, encoding="utf-8")
    widget = root / "LumbusWidget"
    widget.mkdir()
    (widget / "LumbusWidget.swift").write_text("import WidgetKit\n", encoding="utf-8")
    (widget / "LumbusWidgetBundle.swift").write_text("import SwiftUI\n", encoding="utf-8")
    (widget / "Info.plist").write_bytes(plistlib.dumps({}))
    return root


@pytest.fixture
def options(ios_root):
    return make_options(ios_root)


@pytest.fixture
def descriptor(options):
    return ProjectDescriptor.load(options)
